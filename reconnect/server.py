import argparse

import uvicorn

from reconnect.config import HOST, PORT


def main():
    parser = argparse.ArgumentParser(description="Run the ReConnect API server")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    args = parser.parse_args()

    uvicorn.run("reconnect.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
