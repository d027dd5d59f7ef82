"""LauncherFactory — picks the launcher implementation for a target."""

from __future__ import annotations

from script_trigger.config import Settings
from script_trigger.launchers.base import Launcher
from script_trigger.models import ExecutionTarget


class LauncherFactory:
    """Creates the correct Launcher for an ExecutionTarget.

    Usage::

        with LauncherFactory(settings).create(target) as launcher:
            ...
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    def create(self, target: ExecutionTarget) -> Launcher:
        """Local targets run on the controller, the others through their node agent."""
        if target.is_local:
            from script_trigger.launchers.local import LocalLauncher

            return LocalLauncher(
                root=target.root_path,
                poll_interval=self._settings.runner.poll_interval_seconds,
                temp_prefix=self._settings.runner.temp_prefix,
            )

        from script_trigger.launchers.remote import RemoteLauncher

        remote = self._settings.remote
        return RemoteLauncher(
            base_url=target.node_url,  # type: ignore[arg-type]
            api_token=remote.api_token,
            timeout=remote.timeout_seconds,
            poll_interval=remote.poll_interval_seconds,
            root=target.root_path,
            temp_prefix=self._settings.runner.temp_prefix,
        )

    __call__ = create
