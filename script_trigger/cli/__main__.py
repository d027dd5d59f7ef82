from script_trigger.cli.main import app

app()
