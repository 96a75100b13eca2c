import argparse
import os


def main():
    parser = argparse.ArgumentParser(add_help=True)
    parser.add_argument("--host", default=None, help="HTTP_HOST (overrides env).")
    parser.add_argument("--port", default=None, type=int, help="HTTP_PORT (overrides env).")
    parser.add_argument("--node-url", default=None, help="NODE_URL (overrides env).")
    parser.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Answer 503 instead of exiting when an invitation cannot be created.",
    )
    args = parser.parse_args()

    if args.host:
        os.environ["HTTP_HOST"] = args.host
    if args.port:
        os.environ["HTTP_PORT"] = str(args.port)
    if args.node_url:
        os.environ["NODE_URL"] = args.node_url
    if args.no_fail_fast:
        os.environ["GATEWAY_FAIL_FAST"] = "0"

    import uvicorn

    from gateway.config import HTTP_HOST, HTTP_PORT, NODE_REQUEST_TIMEOUT, NODE_URL
    from gateway.main import create_app
    from gateway.node import HttpNode

    node = HttpNode(NODE_URL, timeout=NODE_REQUEST_TIMEOUT)
    app = create_app(node, port=HTTP_PORT)

    uvicorn.run(app, host=HTTP_HOST, port=HTTP_PORT, reload=False)


if __name__ == "__main__":
    main()
