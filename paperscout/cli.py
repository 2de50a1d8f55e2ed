from __future__ import annotations

import argparse
from dataclasses import replace
import logging
from typing import Callable

import requests

from paperscout.config import AppConfig, load_app_config
from paperscout.models import SearchMode, SearchState
from paperscout.orchestrator import SearchOrchestrator
from paperscout.render import display_items, render_state

SHELL_HELP = """Commands:
  <text>                    search in the current mode
  :mode keyword|citation    switch search mode (clears results)
  :open N / :close N        show or hide details and link of item N
  :help                     show this help
  :quit                     leave the shell"""


class ShellSession:
    """Interactive state: the orchestrator plus which items are expanded."""

    def __init__(self, orchestrator: SearchOrchestrator) -> None:
        self.orchestrator = orchestrator
        self.expanded: set[int] = set()

    @property
    def prompt(self) -> str:
        return f"paperscout[{self.orchestrator.mode.value}]> "

    def _render(self, state: SearchState | None = None) -> str:
        return render_state(state or self.orchestrator.state, self.expanded)

    def _toggle(self, argument: str, expand: bool) -> str:
        try:
            index = int(argument)
        except ValueError:
            return f"Not an item number: {argument!r}"
        if not 1 <= index <= len(display_items(self.orchestrator.state)):
            return f"No item {index}."
        if expand:
            self.expanded.add(index)
        else:
            self.expanded.discard(index)
        return self._render()

    def handle(self, line: str) -> str | None:
        """Run one shell line; ``None`` means the session is over."""
        text = line.strip()
        if not text:
            return ""
        if not text.startswith(":"):
            self.expanded.clear()
            return self._render(self.orchestrator.run(self.orchestrator.mode, text))

        command, _, argument = text[1:].partition(" ")
        argument = argument.strip()
        if command in {"quit", "exit", "q"}:
            return None
        if command == "help":
            return SHELL_HELP
        if command == "mode":
            try:
                mode = SearchMode(argument.lower())
            except ValueError:
                return "Usage: :mode keyword|citation"
            self.expanded.clear()
            return self._render(self.orchestrator.set_mode(mode))
        if command == "open":
            return self._toggle(argument, expand=True)
        if command == "close":
            return self._toggle(argument, expand=False)
        return f"Unknown command: {command}. Type :help for commands."


def run_shell(
    orchestrator: SearchOrchestrator,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    session = ShellSession(orchestrator)
    write(SHELL_HELP)
    while True:
        try:
            line = read_line(session.prompt)
        except (EOFError, KeyboardInterrupt):
            write("")
            return
        output = session.handle(line)
        if output is None:
            return
        if output:
            write(output)


def _build_orchestrator(config: AppConfig, mode: SearchMode = SearchMode.KEYWORD) -> SearchOrchestrator:
    return SearchOrchestrator(config=config, session=requests.Session(), mode=mode)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Search arXiv by keyword, or list the works citing an arXiv paper."
    )
    parser.add_argument("--verbose", action="store_true", help="Log requests and pipeline steps")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout (seconds) for each API request; overrides the config file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    keyword_parser = subparsers.add_parser("keyword", help="Latest arXiv papers for keywords")
    keyword_parser.add_argument(
        "keywords",
        nargs="*",
        help="Comma-separated keywords, e.g. LLM, machine learning (default from config)",
    )
    keyword_parser.add_argument("--expand", action="store_true", help="Show details and links")

    cite_parser = subparsers.add_parser("cite", help="Citing and related papers for an arXiv paper")
    cite_parser.add_argument("paper", help="arXiv URL or identifier, e.g. https://arxiv.org/abs/2303.08774")
    cite_parser.add_argument("--expand", action="store_true", help="Show details and links")

    shell_parser = subparsers.add_parser("shell", help="Interactive search session")
    shell_parser.add_argument(
        "--mode",
        type=str,
        choices=[mode.value for mode in SearchMode],
        default=SearchMode.KEYWORD.value,
        help="Initial search mode",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_app_config()
    except RuntimeError as error:
        raise SystemExit(str(error)) from error
    if args.timeout is not None and args.timeout > 0:
        config = replace(config, request_timeout=args.timeout)

    if args.command == "shell":
        run_shell(_build_orchestrator(config, SearchMode(args.mode)))
        return

    orchestrator = _build_orchestrator(config)
    if args.command == "cite":
        state = orchestrator.run_citation_search(args.paper)
    else:
        keywords = " ".join(args.keywords).strip() or config.default_keywords
        state = orchestrator.run_keyword_search(keywords)
    print(render_state(state, expanded=args.expand))


if __name__ == "__main__":
    main()
