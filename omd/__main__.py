from omd.cli.main import app

app(prog_name="omd")
