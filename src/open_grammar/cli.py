# SPDX-License-Identifier: MIT
# Copyright (c) 2025-2026 Soroush Yousefpour
"""
Command-line interface for OpenGrammar.

Usage:
    og                          Status + help (default)
    og run [action] [text]      Process text (argument or stdin)
    og custom "instr" [text]    Run a custom instruction on text
    og parse [file]             Split a saved model reply into sections
    og actions                  List available actions
    og key [value]              Show whether a key is set / save a new key
    og language [en|id]         Show or switch response language
    og backend [name]           Show or switch text backend
    og config [path]            Print config, or its path
    og version                  Show version

Options for run/custom/parse:
    --lang en|id                Response language for this run
    --copy final|comments|raw   Copy a section to the clipboard
    --json                      Print the result as JSON
"""

import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from . import config as config_module
from .actions import (
    ACTION_REGISTRY,
    CUSTOM_ACTION,
    action_label,
    get_all_actions,
    normalize_language,
)
from .backends import BACKEND_REGISTRY
from .config import RESPONSE_LANGUAGES, get_config, update_config_field
from .parser import ParsedResult, parse_response
from .processor import TextProcessor
from .utils import (
    C_BOLD,
    C_CYAN,
    C_DIM,
    C_GREEN,
    C_RED,
    C_RESET,
    C_YELLOW,
    copy_to_clipboard,
)

COPY_TARGETS = ("final", "comments", "raw")

LANGUAGE_LABELS = {
    "en": "US English",
    "id": "Bahasa Indonesia",
}

# Panel headings, per language
HEADINGS = {
    "comments": {"en": "Analysis & Comments", "id": "Analisis & Komentar"},
    "final": {"en": "Final Result", "id": "Hasil Akhir"},
    "raw": {"en": "Result", "id": "Hasil"},
}

COPIED = {
    "final": {"en": "Final text copied!", "id": "Teks akhir disalin!"},
    "comments": {"en": "Comments copied!", "id": "Komentar disalin!"},
    "raw": {"en": "Result copied!", "id": "Hasil disalin!"},
}


class UsageError(Exception):
    """Raised for invalid command-line arguments."""
    pass


def _fail(msg: str, hint: str = ""):
    print(f"{C_RED}{msg}{C_RESET}", file=sys.stderr)
    if hint:
        print(f"{C_DIM}{hint}{C_RESET}", file=sys.stderr)
    sys.exit(1)


def _parse_options(args: List[str]) -> Tuple[List[str], dict]:
    """Split --lang/--copy/--json options from positional arguments."""
    positional = []
    options = {"lang": None, "copy": None, "json": False}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("--lang", "--copy"):
            if i + 1 >= len(args):
                raise UsageError(f"Missing value for {arg}")
            options[arg[2:]] = args[i + 1]
            i += 2
            continue
        if arg == "--json":
            options["json"] = True
        elif arg.startswith("--"):
            raise UsageError(f"Unknown option: {arg}")
        else:
            positional.append(arg)
        i += 1

    if options["lang"] is not None and options["lang"] not in RESPONSE_LANGUAGES:
        raise UsageError(f"Unknown language: {options['lang']}")
    if options["copy"] is not None and options["copy"] not in COPY_TARGETS:
        raise UsageError(f"Unknown copy target: {options['copy']}")
    return positional, options


def _read_input(positional: List[str]) -> str:
    """Text from the remaining arguments, or stdin when piped."""
    if positional:
        return " ".join(positional)
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ""


# ---------------------------------------------------------------------------
# Result rendering
# ---------------------------------------------------------------------------

def _print_panel(heading: str, body: str):
    print(f"  {C_BOLD}{heading}{C_RESET}")
    print(f"  {C_DIM}{'─' * len(heading)}{C_RESET}")
    print(body)
    print()


def render_result(result: ParsedResult, language: str = "en"):
    """Print the comments and final text panels, or the raw reply when both are empty."""
    lang = normalize_language(language)
    print()
    if result.is_empty:
        _print_panel(HEADINGS["raw"][lang], result.raw_result)
        return
    if result.comments:
        _print_panel(HEADINGS["comments"][lang], result.comments)
    if result.final_text:
        _print_panel(HEADINGS["final"][lang], result.final_text)


def _copy_section(result: ParsedResult, target: str, language: str):
    value = {
        "final": result.final_text,
        "comments": result.comments,
        "raw": result.raw_result,
    }[target]
    if copy_to_clipboard(value):
        print(f"{C_GREEN}{COPIED[target][normalize_language(language)]}{C_RESET}", file=sys.stderr)
    else:
        print(f"{C_YELLOW}Failed to copy{C_RESET}", file=sys.stderr)


def _emit(result: ParsedResult, options: dict, language: str):
    """Print a result and apply --copy / auto_copy."""
    if options["json"]:
        print(json.dumps(result.as_dict(), ensure_ascii=False, indent=2))
    else:
        render_result(result, language)

    target = options["copy"]
    if target is None and get_config().ui.auto_copy and result.final_text:
        target = "final"
    if target is not None:
        _copy_section(result, target, language)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _run_action(action_id: str, positional: List[str], options: dict,
                instruction: Optional[str] = None):
    config = get_config()
    language = options["lang"] or config.general.language

    if config.backend.provider == "anthropic" and not config.anthropic.effective_api_key:
        _fail("API key is required.", "Set one with: og key <your-key>")

    try:
        processor = TextProcessor()
    except ValueError as e:
        _fail(str(e))
    try:
        result = processor.process(_read_input(positional), action_id, language, instruction)
    finally:
        processor.close()

    _emit(result, options, language)


def cmd_run(args: list):
    """Process text with a built-in action."""
    try:
        positional, options = _parse_options(args)
    except UsageError as e:
        _fail(str(e), "Usage: og run [action] [text] [--lang en|id] [--copy final|comments|raw] [--json]")

    action_id = get_config().general.action
    if positional and positional[0] in ACTION_REGISTRY:
        action_id = positional.pop(0)
    if action_id == CUSTOM_ACTION:
        _fail("Use 'og custom \"<instruction>\" [text]' for custom actions.")

    _run_action(action_id, positional, options)


def cmd_custom(args: list):
    """Process text with a custom instruction."""
    try:
        positional, options = _parse_options(args)
    except UsageError as e:
        _fail(str(e), "Usage: og custom \"<instruction>\" [text] [--lang en|id] [--copy ...] [--json]")

    instruction = positional.pop(0) if positional else ""
    _run_action(CUSTOM_ACTION, positional, options, instruction=instruction)


def cmd_parse(args: list):
    """Parse a saved model reply from a file or stdin."""
    try:
        positional, options = _parse_options(args)
    except UsageError as e:
        _fail(str(e), "Usage: og parse [file] [--lang en|id] [--copy ...] [--json]")

    if len(positional) > 1:
        _fail(f"Unexpected argument: {positional[1]}")

    # Decoded from bytes so line endings reach rawResult untouched
    if positional:
        path = Path(positional[0]).expanduser()
        try:
            raw = path.read_bytes().decode("utf-8")
        except OSError as e:
            _fail(f"Cannot read {path}: {e}")
        except UnicodeDecodeError as e:
            _fail(f"{path} is not valid UTF-8: {e}")
    elif not sys.stdin.isatty():
        try:
            raw = sys.stdin.buffer.read().decode("utf-8")
        except UnicodeDecodeError as e:
            _fail(f"Input is not valid UTF-8: {e}")
    else:
        _fail("No input.", "Usage: og parse [file]  (or pipe a reply on stdin)")

    language = options["lang"] or get_config().general.language
    _emit(parse_response(raw), options, language)


def cmd_actions():
    """List actions in the configured language."""
    config = get_config()
    width = max(len(a.id) for a in get_all_actions())
    for action in get_all_actions():
        marker = f" {C_GREEN}(default){C_RESET}" if action.id == config.general.action else ""
        label = action_label(action, config.general.language)
        print(f"    {C_CYAN}{action.id:<{width}}{C_RESET}  {C_DIM}{label}{C_RESET}{marker}")


def cmd_key(args: list):
    """Show or set the Claude API key."""
    config = get_config()
    if not args:
        if config.anthropic.api_key.strip():
            print(f"  {C_DIM}API key:{C_RESET} {C_GREEN}set in config{C_RESET}")
        elif config.anthropic.effective_api_key:
            print(f"  {C_DIM}API key:{C_RESET} {C_GREEN}set from environment{C_RESET}")
        else:
            print(f"  {C_DIM}API key:{C_RESET} {C_YELLOW}not set{C_RESET}")
            print(f"  {C_DIM}Set one with: og key <your-key>{C_RESET}")
        return

    new_key = args[0].strip()
    if not new_key:
        _fail("API key cannot be empty.")
    if not update_config_field("anthropic", "api_key", new_key):
        sys.exit(1)
    print(f"{C_GREEN}API key saved{C_RESET} {C_DIM}({config_module.CONFIG_FILE}){C_RESET}")


def cmd_language(args: list):
    """Show or switch response language."""
    config = get_config()
    if not args:
        current = config.general.language
        print(f"  {C_DIM}current:{C_RESET} {C_CYAN}{current}{C_RESET}")
        print()
        print(f"  {C_BOLD}Available:{C_RESET}")
        for code in RESPONSE_LANGUAGES:
            marker = f" {C_GREEN}(active){C_RESET}" if code == current else ""
            print(f"    {C_CYAN}{code}{C_RESET}  {C_DIM}{LANGUAGE_LABELS[code]}{C_RESET}{marker}")
        return

    new_language = args[0]
    if new_language not in RESPONSE_LANGUAGES:
        _fail(f"Unknown language: {new_language}", f"Available: {', '.join(RESPONSE_LANGUAGES)}")
    if not update_config_field("general", "language", new_language):
        sys.exit(1)
    print(f"{C_GREEN}Language set to:{C_RESET} {LANGUAGE_LABELS[new_language]}")


def cmd_backend(args: list):
    """Show or switch backend."""
    config = get_config()
    if not args:
        current = config.backend.provider
        print(f"  {C_DIM}current:{C_RESET} {C_CYAN}{current}{C_RESET}")
        print()
        print(f"  {C_BOLD}Available:{C_RESET}")
        for bid, info in BACKEND_REGISTRY.items():
            marker = f" {C_GREEN}(active){C_RESET}" if bid == current else ""
            print(f"    {C_CYAN}{bid}{C_RESET}  {C_DIM}{info.description}{C_RESET}{marker}")
        return

    new_backend = args[0]
    if new_backend not in BACKEND_REGISTRY:
        available = ", ".join(sorted(BACKEND_REGISTRY))
        _fail(f"Unknown backend: {new_backend}", f"Available: {available}")
    if not update_config_field("backend", "provider", new_backend):
        sys.exit(1)
    print(f"{C_GREEN}Backend set to:{C_RESET} {new_backend}")


def cmd_config(args: list):
    """Print the config file, or its path."""
    if args and args[0] == "path":
        print(config_module.CONFIG_FILE)
        return
    if args:
        _fail(f"Unknown config command: {args[0]}", "Usage: og config [path]")
    get_config()  # creates the default file on first use
    print(config_module.CONFIG_FILE.read_text(encoding="utf-8"))


def cmd_version():
    """Show version."""
    try:
        from open_grammar import __version__
        print(f"OpenGrammar {__version__}")
    except Exception:
        print("OpenGrammar (version unknown)")


def _print_help():
    """Print grouped help listing."""
    groups = [
        ("Process", [
            ("og run [action] [text]",   "Run an action on text (or stdin)"),
            ("og custom \"instr\" [text]", "Run a custom instruction"),
            ("og parse [file]",          "Split a saved model reply"),
            ("og actions",               "List actions"),
        ]),
        ("Settings", [
            ("og key [value]",           "Show or save the Claude API key"),
            ("og language [en|id]",      "Show or switch response language"),
            ("og backend [name]",        "Show or switch text backend"),
            ("og config [path]",         "Print config, or its path"),
        ]),
        ("Options", [
            ("--lang en|id",             "Response language for this run"),
            ("--copy final|comments|raw", "Copy a section to the clipboard"),
            ("--json",                   "Print the result as JSON"),
        ]),
    ]
    width = max(len(c) for _, cmds in groups for c, _ in cmds)
    for group_name, cmds in groups:
        print(f"  {C_BOLD}{group_name}{C_RESET}")
        for cmd, desc in cmds:
            print(f"    {C_CYAN}{cmd:<{width}}{C_RESET}  {C_DIM}{desc}{C_RESET}")
        print()


def cmd_default():
    """Default: status + help."""
    config = get_config()
    key_state = (
        f"{C_GREEN}set{C_RESET}" if config.anthropic.effective_api_key
        else f"{C_YELLOW}not set{C_RESET}"
    )

    print()
    print(f"  {C_BOLD}╭────────────────────────────────────────╮{C_RESET}")
    print(f"  {C_BOLD}│{C_RESET}  {C_CYAN}OpenGrammar{C_RESET} · Bring Your Own Key       {C_BOLD}│{C_RESET}")
    print(f"  {C_BOLD}╰────────────────────────────────────────╯{C_RESET}")
    print()
    print(f"  Backend:  {C_CYAN}{config.backend.provider}{C_RESET}")
    print(f"  Language: {C_CYAN}{LANGUAGE_LABELS[config.general.language]}{C_RESET}")
    print(f"  Action:   {C_CYAN}{config.general.action}{C_RESET}")
    print(f"  API key:  {key_state}")
    print(f"  Config:   {C_DIM}{config_module.CONFIG_FILE}{C_RESET}")
    print()

    _print_help()


def cli_main():
    """Entry point for the og CLI."""
    args = sys.argv[1:]

    if not args:
        cmd_default()
        return

    cmd = args[0]
    rest = args[1:]

    if cmd == "run":
        cmd_run(rest)
    elif cmd == "custom":
        cmd_custom(rest)
    elif cmd == "parse":
        cmd_parse(rest)
    elif cmd == "actions":
        cmd_actions()
    elif cmd == "key":
        cmd_key(rest)
    elif cmd == "language":
        cmd_language(rest)
    elif cmd == "backend":
        cmd_backend(rest)
    elif cmd == "config":
        cmd_config(rest)
    elif cmd == "version":
        cmd_version()
    elif cmd in ("-h", "--help", "help"):
        _print_help()
    else:
        print(f"{C_RED}Unknown command: {cmd}{C_RESET}", file=sys.stderr)
        print(f"{C_DIM}Run 'og' for usage.{C_RESET}", file=sys.stderr)
        sys.exit(1)
