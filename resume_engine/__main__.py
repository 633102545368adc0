import argparse

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the resume engine API server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3001)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()
    uvicorn.run("resume_engine.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
