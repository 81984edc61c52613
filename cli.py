#!/usr/bin/env python3
import argparse

from mailpipe.orchestrator import run_once
from mailpipe.utils import set_log_level


def main():
    parser = argparse.ArgumentParser(description="Mailpipe CLI")
    parser.add_argument("--config", required=True, help="Path to YAML config")
    parser.add_argument("--input", dest="input", help="Input feed path, '-' for stdin (overrides config)")
    parser.add_argument("--encoding", dest="encoding", help="Text encoding for input and sink feeds, stdin/stdout included")
    parser.add_argument("--log-level", dest="log_level", help="Log level (overrides LOG_LEVEL)")
    args = parser.parse_args()

    if args.log_level:
        set_log_level(args.log_level)

    overrides = {
        "input": args.input,
        "encoding": args.encoding,
    }

    run_once(args.config, overrides=overrides)


if __name__ == "__main__":
    main()
