from news_mcp.news_server import run_server

run_server()
