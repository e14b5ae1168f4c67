"""CLI entry point and orchestration."""

import argparse
import logging
import sys
from pathlib import Path

import keyring
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from numbered_print.config import SERVICE_NAME, _config_paths, _normalize_extensions, load_config
from numbered_print.loader import ImageLoader
from numbered_print.output import print_no_images, print_summary
from numbered_print.printing import export_pdf, open_page
from numbered_print.probe import open_source
from numbered_print.render import write_page


def _configure_logging(console: Console, verbose: bool) -> None:
    """Route numbered_print loggers to the console; DEBUG shows every probe miss."""
    logger = logging.getLogger("numbered_print")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _configured_username(config_path: Path | None) -> str | None:
    """Read auth_username from the first config file found, without touching keyring."""
    import yaml

    for path in _config_paths(config_path):
        if path.exists():
            with path.open() as f:
                data = yaml.safe_load(f) or {}
            if isinstance(data, dict) and data.get("auth_username"):
                return str(data["auth_username"]).strip()
            return None
    return None


def _run_setup(config_path: Path | None, username: str | None) -> None:
    """Store the HTTP basic-auth password in keyring. Prompts user for input."""
    console = Console()
    username = username or _configured_username(config_path)
    if not username:
        username = console.input("[bold]Username for the image server:[/] ").strip()
    if not username:
        console.print("[red]Username cannot be empty.[/]")
        raise SystemExit(1)
    password = console.input(f"[bold]Password for {username}:[/] ", password=True)
    if not password:
        console.print("[red]Password cannot be empty.[/]")
        raise SystemExit(1)
    keyring.set_password(SERVICE_NAME, username, password)
    console.print("[green]Password stored in keyring.[/]")


def _run_remove_keyring(config_path: Path | None, username: str | None) -> None:
    """Remove the stored password from keyring (for cleanup)."""
    console = Console()
    username = username or _configured_username(config_path)
    if not username:
        console.print("[red]No username given.[/] Use -u/--username or set auth_username in config.")
        raise SystemExit(1)
    try:
        keyring.delete_password(SERVICE_NAME, username)
        console.print("[green]Removed keyring entry.[/]")
    except keyring.errors.PasswordDeleteError:
        console.print("[dim]No keyring entry found (already removed or never set).[/]")


def _keyring_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("-c", "--config", type=Path, default=None, help="Path to config file")
    parser.add_argument("-u", "--username", default=None, help="Username (default: auth_username from config)")
    return parser


def _scan(loader: ImageLoader, console: Console, verbose: bool) -> None:
    """Run one scan with a progress display. Ctrl+C cancels it and discards its results."""
    with Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Probing images...", total=None)
        found: list = []

        def on_probe(result) -> None:
            progress.update(
                task,
                description=f"Probing {result.index}.{result.extension} ({len(found)} loaded)",
            )

        def on_loaded(image, state) -> None:
            found.append(image)
            if verbose:
                console.print(f"[dim]Loaded {image.name} ({image.width}×{image.height})[/]")

        try:
            loader.reload(on_probe=on_probe, on_loaded=on_loaded)
        except KeyboardInterrupt:
            loader.cancel()
            console.print("[yellow]Scan cancelled.[/]")


def _show(loader: ImageLoader, console: Console, folder: str) -> None:
    if loader.images:
        print_summary(loader.images, console, stats=loader.stats_text(), folder=folder)
    else:
        print_no_images(folder, console)


def _run_interactive(
    loader: ImageLoader,
    config: dict,
    out_path: Path,
    console: Console,
    folder: str,
    verbose: bool,
) -> None:
    """Prompt for reload/print until the user quits."""
    _show(loader, console, folder)
    while True:
        try:
            choice = console.input("\n[bold](r)eload / (p)rint / (q)uit:[/] ").strip().lower()
        except EOFError:
            break
        if choice in ("q", "quit"):
            break
        if choice in ("r", "reload"):
            _scan(loader, console, verbose)
            _show(loader, console, folder)
        elif choice in ("p", "print"):
            try:
                path = export_pdf(loader.images, config, out_path, stats=loader.stats_text())
            except (ValueError, RuntimeError, OSError) as e:
                console.print(f"[red]Error:[/] {e}")
                continue
            console.print(f"[green]Sent to browser for printing:[/] {path}")
        else:
            console.print("[red]Invalid choice.[/] Enter r, p or q.")


def main() -> None:
    """Run the numbered-print CLI."""
    if len(sys.argv) > 1 and sys.argv[1] == "setup":
        sys.argv.pop(1)
        args = _keyring_parser("Store the image server password in keyring.").parse_args()
        _run_setup(args.config, args.username)
        return

    if len(sys.argv) > 1 and sys.argv[1] == "remove-keyring":
        sys.argv.pop(1)
        args = _keyring_parser("Remove stored password from keyring.").parse_args()
        _run_remove_keyring(args.config, args.username)
        return

    parser = argparse.ArgumentParser(
        description="Find numbered images (1.png, 2.jpg, ...) and print them to PDF via the browser.",
    )
    parser.add_argument(
        "-f",
        "--folder",
        help="Folder or http(s) base URL holding the images (default: image_folder from config)",
    )
    parser.add_argument(
        "-e",
        "--extensions",
        nargs="+",
        help="Extensions to try for each number, in order (e.g., png jpg)",
    )
    parser.add_argument(
        "-m",
        "--max-misses",
        type=int,
        help="Stop after this many numbers in a row have no image",
    )
    parser.add_argument(
        "--max-index",
        type=int,
        help="Highest number to probe",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Where to write the HTML page (default: output_html from config)",
    )
    parser.add_argument(
        "-p",
        "--print",
        action="store_true",
        help="Open the browser print dialog to save a PDF",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Write the page but do not open it",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Interactive mode: reload or print from a prompt",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to config file (optional)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show every probe and loaded image",
    )
    args = parser.parse_args()

    if args.max_misses is not None and args.max_misses < 1:
        parser.error("--max-misses must be at least 1")
    if args.max_index is not None and args.max_index < 1:
        parser.error("--max-index must be at least 1")

    console = Console()
    _configure_logging(console, args.verbose)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e
    except ValueError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    folder = args.folder or config["image_folder"]
    extensions = config["image_extensions"]
    if args.extensions:
        try:
            extensions = _normalize_extensions(args.extensions)
        except ValueError as e:
            parser.error(f"--extensions: {e}")
    max_misses = args.max_misses or config["max_consecutive_misses"]
    max_index = args.max_index or config["max_index"]
    out_path = args.output or Path(config["output_html"])

    if args.verbose:
        console.print(f"[dim]Config:[/] {config['_loaded_from']}")
        console.print(f"[dim]Folder:[/] {folder}")
        console.print(f"[dim]Extensions:[/] {', '.join(extensions)}")
        console.print(f"[dim]Stop after:[/] {max_misses} miss(es) in a row, index {max_index} at most")
        console.print("")

    auth = None
    if config["auth_username"]:
        auth = (config["auth_username"], config["auth_password"])
    try:
        source = open_source(folder, timeout=config["request_timeout"], auth=auth)
    except NotADirectoryError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    loader = ImageLoader(
        source,
        extensions,
        max_misses,
        max_index=max_index,
        delay=config["probe_delay"],
    )
    _scan(loader, console, args.verbose)

    if args.interactive:
        _run_interactive(loader, config, out_path, console, str(source), args.verbose)
        return

    if not loader.images:
        print_no_images(str(source), console)
        return

    print_summary(loader.images, console, stats=loader.stats_text(), folder=str(source))

    if args.print:
        try:
            path = export_pdf(loader.images, config, out_path, stats=loader.stats_text())
        except (ValueError, RuntimeError, OSError) as e:
            console.print(f"[red]Error:[/] {e}")
            raise SystemExit(1) from e
        console.print(f"[green]Sent to browser for printing:[/] {path}")
        return

    try:
        path = write_page(loader.images, config, out_path, stats=loader.stats_text())
    except OSError as e:
        console.print(f"[red]Error:[/] Could not write {out_path}: {e}")
        raise SystemExit(1) from e
    console.print(f"[green]Wrote[/] {path}")
    if not args.no_open:
        try:
            open_page(path)
        except RuntimeError as e:
            console.print(f"[yellow]Warning:[/] {e}")
