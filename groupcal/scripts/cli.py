"""
A simple CLI for setting up the database and running the server.
"""

import sys

import uvicorn


def run_server(host: str = "0.0.0.0", port: int = 8000):
    uvicorn.run("groupcal.api.app:app", host=host, port=port)


def main():
    try:
        command = sys.argv[1]
    except IndexError:
        print("Supported commands are groupcal setup, groupcal run, or groupcal routes")
        exit(1)

    if command == "setup":
        from groupcal.config.settings import Settings

        settings = Settings()
        settings.sync_manager().create_all()

        print("Setup complete, tables created")
        exit(0)

    if command == "run":
        port = int(sys.argv[2]) if len(sys.argv) > 2 else 8000
        run_server(port=port)
        exit(0)

    if command == "routes":
        from groupcal.api.routes import describe

        for line in describe():
            print(line)
        exit(0)

    print(f"Unknown command {command}")
    exit(1)
