"""Command-line interface for folder hasher."""

import argparse
import sys
from pathlib import Path

from .commands import compare_folders, generate_hashes, print_banner, verify_hashes
from .exceptions import FolderHasherError
from .models import HashAlgorithm, NewFilePolicy


def algorithm_arg(text: str) -> HashAlgorithm:
    """argparse type for --algorithm."""
    try:
        return HashAlgorithm.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def add_common_options(parser: argparse.ArgumentParser, default=None) -> None:
    """Add the options shared by every command."""
    def pick(value):
        return value if default is None else default

    parser.add_argument(
        "--no-progress",
        dest="progress",
        action="store_false",
        default=pick(True),
        help="Hide progress bars"
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=pick(False),
        help="Abort on the first unreadable file instead of skipping it"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=pick(1),
        help="Number of threads used for hashing (default: 1)"
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="folder-hasher",
        description="Hash, verify and compare folder trees.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate /path/to/folder hashes.csv --algorithm SHA256
  %(prog)s verify hashes.csv --workers 4
  %(prog)s compare /path/to/source /path/to/target --save diff.csv --sync no
  %(prog)s            (interactive menu)
        """
    )

    add_common_options(parser)
    # The same options are accepted after the subcommand; SUPPRESS keeps an
    # option given before the subcommand from being reset by a default.
    common = argparse.ArgumentParser(add_help=False)
    add_common_options(common, default=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command")

    generate = subparsers.add_parser(
        "generate", parents=[common], help="Hash a folder and save a manifest"
    )
    generate.add_argument("directory", type=Path, help="Folder to hash")
    generate.add_argument("manifest", type=Path, help="CSV manifest to write")
    generate.add_argument(
        "--algorithm", "-a",
        type=algorithm_arg,
        default=HashAlgorithm.SHA256,
        help="MD5, SHA1, SHA256, SHA384, SHA512 or XXH64 (default: SHA256)"
    )

    verify = subparsers.add_parser(
        "verify", parents=[common], help="Check a folder against its manifest"
    )
    verify.add_argument("manifest", type=Path, help="CSV manifest written by generate")
    verify.add_argument(
        "--new-files",
        choices=[p.value for p in NewFilePolicy],
        default=NewFilePolicy.INFO.value,
        help="Whether files missing from the manifest count as errors (default: info)"
    )

    compare = subparsers.add_parser(
        "compare", parents=[common], help="Compare a target folder against a source folder"
    )
    compare.add_argument("source", type=Path, help="Source folder (source of truth)")
    compare.add_argument("target", type=Path, help="Target folder")
    compare.add_argument(
        "--algorithm", "-a",
        type=algorithm_arg,
        default=HashAlgorithm.SHA256,
        help="MD5, SHA1, SHA256, SHA384, SHA512 or XXH64 (default: SHA256)"
    )
    compare.add_argument("--save", "-s", type=Path, help="Write the diff report to this CSV file")
    compare.add_argument(
        "--sync",
        choices=["yes", "no"],
        help="Copy missing and mismatched files into target (default: ask)"
    )
    compare.add_argument(
        "--new-files",
        choices=[p.value for p in NewFilePolicy],
        default=NewFilePolicy.ERROR.value,
        help="Whether files only in target count as errors (default: error)"
    )

    subparsers.add_parser(
        "menu", parents=[common], help="Interactive menu (default when no command is given)"
    )

    return parser.parse_args(argv)


def run_command(args: argparse.Namespace):
    """Dispatch a parsed command to its operation."""
    on_error = "fail" if args.fail_fast else "skip"

    if args.command == "generate":
        return generate_hashes(
            args.directory, args.manifest, args.algorithm,
            workers=args.workers, on_error=on_error, progress=args.progress
        )
    if args.command == "verify":
        return verify_hashes(
            args.manifest, NewFilePolicy(args.new_files),
            workers=args.workers, on_error=on_error, progress=args.progress
        )
    if args.command == "compare":
        sync = None if args.sync is None else args.sync == "yes"
        return compare_folders(
            args.source, args.target, args.algorithm,
            save=args.save, sync=sync, new_files=NewFilePolicy(args.new_files),
            workers=args.workers, on_error=on_error, progress=args.progress
        )
    raise ValueError(f"Unknown command: {args.command}")


def prompt_algorithm() -> HashAlgorithm:
    """Ask for a hash algorithm until a valid one is given."""
    while True:
        text = input("Algorithm [SHA256]: ").strip()
        if not text:
            return HashAlgorithm.SHA256
        try:
            return HashAlgorithm.parse(text)
        except ValueError as e:
            print(e)


def run_menu(args: argparse.Namespace) -> None:
    """Interactive loop: pick an operation, run it, repeat until quit."""
    on_error = "fail" if args.fail_fast else "skip"

    while True:
        print_banner("FOLDER HASHER")
        print("  1: Generate hashes for a folder")
        print("  2: Verify a folder against a manifest")
        print("  3: Compare two folders")
        print("  4: Quit")

        try:
            choice = input("\nEnter your choice (1-4): ").strip()

            if choice == "1":
                folder = Path(input("Folder to hash: ").strip())
                manifest = Path(input("Manifest file to write: ").strip())
                algorithm = prompt_algorithm()
                generate_hashes(
                    folder, manifest, algorithm,
                    workers=args.workers, on_error=on_error, progress=args.progress
                )
            elif choice == "2":
                manifest = Path(input("Manifest file: ").strip())
                verify_hashes(
                    manifest, workers=args.workers, on_error=on_error, progress=args.progress
                )
            elif choice == "3":
                source = Path(input("Source folder: ").strip())
                target = Path(input("Target folder: ").strip())
                algorithm = prompt_algorithm()
                save = input("Save diff report to (blank to skip): ").strip()
                compare_folders(
                    source, target, algorithm, save=Path(save) if save else None,
                    workers=args.workers, on_error=on_error, progress=args.progress
                )
            elif choice == "4":
                return
            else:
                print("Invalid choice. Please enter 1, 2, 3, or 4.")
        except (FolderHasherError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
        except EOFError:
            return


def main() -> None:
    """Main entry point."""
    args = parse_args()

    try:
        if args.command in (None, "menu"):
            run_menu(args)
            return
        result = run_command(args)
    except (FolderHasherError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        print("\n\nInterrupted! Nothing is rolled back: a sync may have copied some files.")
        sys.exit(1)

    if result.error_count:
        sys.exit(1)
