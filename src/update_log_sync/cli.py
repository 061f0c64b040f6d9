"""CLI entrypoint for reading, writing and syncing update logs."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from update_log_sync.config import Config, load_config
from update_log_sync.logging_config import configure_logging
from update_log_sync.notify import StderrNotifier
from update_log_sync.state import build_cache_store
from update_log_sync.storage import CONFIG_KEY, build_storage

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_CONFIGURED = 2


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(config.logging_level)

    if args.command == "show":
        return run_show(config)

    if args.command == "add":
        return run_add(args, config)

    if args.command == "save":
        return run_save(args, config)

    if args.command == "pull":
        return run_pull(config)

    if args.command == "push":
        return run_push(config)

    if args.command == "info":
        return run_info(config)

    if args.command == "configure":
        return run_configure(args, config)

    parser.print_help()
    return EXIT_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="update-log-sync")
    parser.add_argument("--config", default="config.yaml", help="Path to config.yaml")

    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("show", help="Print the update log collection as JSON")

    add_parser = subparsers.add_parser("add", help="Append one record and save the collection")
    add_parser.add_argument("--record", required=True, help="Record as a JSON object")

    save_parser = subparsers.add_parser(
        "save", help="Replace the collection with the contents of a JSON file"
    )
    save_parser.add_argument("--input", required=True, help="Path to a JSON list of records")

    subparsers.add_parser("pull", help="Fetch the collection from GitHub into the local cache")
    subparsers.add_parser("push", help="Push the local cache to GitHub")
    subparsers.add_parser("info", help="Show the GitHub connection (without the token)")

    configure_parser = subparsers.add_parser(
        "configure", help="Store GitHub connection settings in the local cache"
    )
    configure_parser.add_argument("--username", required=True, help="Repository owner")
    configure_parser.add_argument("--repo", required=True, help="Repository name")
    configure_parser.add_argument("--token", required=True, help="Personal access token")
    configure_parser.add_argument("--branch", default="main", help="Target branch (default: main)")

    return parser


def run_show(config: Config) -> int:
    logs = build_storage(config).load()
    print(json.dumps(logs, indent=2, ensure_ascii=False))
    return EXIT_OK


def run_add(args: argparse.Namespace, config: Config) -> int:
    try:
        record = json.loads(args.record)
    except json.JSONDecodeError as exc:
        LOGGER.error("--record is not valid JSON: %s", exc)
        return EXIT_FAILED

    storage = build_storage(config, notifier=StderrNotifier())
    logs = storage.load()
    if not isinstance(logs, list):
        LOGGER.error("Stored collection is not a JSON list, got %s", type(logs).__name__)
        return EXIT_FAILED
    logs.append(record)
    return EXIT_OK if storage.save(logs) else EXIT_FAILED


def run_save(args: argparse.Namespace, config: Config) -> int:
    input_path = Path(args.input)
    try:
        logs = json.loads(input_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        LOGGER.error("Could not read %s: %s", input_path, exc)
        return EXIT_FAILED
    if not isinstance(logs, list):
        LOGGER.error("%s must contain a JSON list, got %s", input_path, type(logs).__name__)
        return EXIT_FAILED

    storage = build_storage(config, notifier=StderrNotifier())
    return EXIT_OK if storage.save(logs) else EXIT_FAILED


def run_pull(config: Config) -> int:
    result = build_storage(config).pull()
    if not result.ok:
        LOGGER.error("%s", result.error)
        return EXIT_NOT_CONFIGURED

    LOGGER.info("Pulled %d update log records", len(result.value or []))
    return EXIT_OK


def run_push(config: Config) -> int:
    result = build_storage(config, notifier=StderrNotifier()).push()
    if not result.ok:
        LOGGER.error("%s", result.error)
        return EXIT_NOT_CONFIGURED
    return EXIT_OK if result.value else EXIT_FAILED


def run_info(config: Config) -> int:
    info = build_storage(config).get_config_info()
    if info is None:
        print("GitHub is not configured")
        return EXIT_NOT_CONFIGURED

    print(f"Repository: {info.username}/{info.repo} ({info.branch})")
    print(f"URL: {info.repo_url}")
    return EXIT_OK


def run_configure(args: argparse.Namespace, config: Config) -> int:
    settings = {
        "username": args.username,
        "repo": args.repo,
        "token": args.token,
        "branch": args.branch,
    }
    build_cache_store(config).set(CONFIG_KEY, json.dumps(settings))
    LOGGER.info("Stored GitHub settings for %s/%s", args.username, args.repo)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
