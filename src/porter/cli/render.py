"""Terminal formatting helpers shared by CLI commands."""

from __future__ import annotations

import click


def green(text: str) -> str:
    return f"\033[32m{text}\033[0m"


def red(text: str) -> str:
    return f"\033[31m{text}\033[0m"


def yellow(text: str) -> str:
    return f"\033[33m{text}\033[0m"


def cyan(text: str) -> str:
    return f"\033[36m{text}\033[0m"


def gray(text: str) -> str:
    return f"\033[90m{text}\033[0m"


def bold(text: str) -> str:
    return f"\033[1m{text}\033[0m"


def section(title: str) -> None:
    click.echo(f"\n{bold(title)}")


def print_errors(errors: list[str], *, indent: str = "   ") -> None:
    for error in errors:
        click.echo(red(f"{indent}{error}"))


def print_warnings(warnings: list[str], *, indent: str = "   ") -> None:
    for warning in warnings:
        click.echo(yellow(f"{indent}⚠ {warning}"))


def format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
