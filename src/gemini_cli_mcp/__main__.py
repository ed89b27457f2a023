from gemini_cli_mcp.api.cli.main import app

app()
