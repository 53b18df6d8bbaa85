import argparse
import json
import logging
import os
import sys

from stacklogo.api import build_logo, load_input
from stacklogo.config import COLOR_SCHEMES, DEFAULT_NSITES, LOGO_TYPES, create_display_config, create_parser_config
from stacklogo.errors import LogoError


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    if verbose:
        logging.getLogger("numba").setLevel(logging.WARNING)


def create_arg_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="stacklogo: compute sequence logo heights and stacking layouts from FASTA or MEME input",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
 Examples:
   # Aligned FASTA records, layout as JSON
   stacklogo sites.fa

   # MEME motif with an explicit mode and a protein display type
   stacklogo motif.txt --mode meme --type protein --color-scheme chemistry

   # Layout intervals as a tab-separated table
   stacklogo sites.fa --format tsv
         """,
    )
    parser.add_argument("input", help="Path to a FASTA or single-motif MEME file.")

    input_group = parser.add_argument_group("Input Options")
    input_group.add_argument(
        "--mode",
        choices=["fasta", "meme"],
        help="Input format. Inferred from the file extension when omitted.",
    )
    input_group.add_argument(
        "--default-nsites",
        type=int,
        default=DEFAULT_NSITES,
        help="Number of sites assumed when a MEME matrix declares none. (default: %(default)s)",
    )
    input_group.add_argument(
        "--row-tolerance",
        type=float,
        default=1e-2,
        help="Allowed deviation of a frequency row sum from 1. (default: %(default)s)",
    )
    input_group.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip checking parsed frequency rows.",
    )

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--format",
        choices=["json", "tsv"],
        default="json",
        help="Output format: full JSON document or a table of layout intervals. (default: %(default)s)",
    )
    output_group.add_argument(
        "--type",
        choices=list(LOGO_TYPES),
        default="nucleotide",
        help="Logo type passed on to the renderer. (default: %(default)s)",
    )
    output_group.add_argument(
        "--color-scheme",
        choices=list(COLOR_SCHEMES),
        default="classic",
        help="Colour scheme name passed on to the renderer. (default: %(default)s)",
    )

    technical_group = parser.add_argument_group("Technical Options")
    technical_group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging to standard error.",
    )

    return parser


def main_cli():
    """Main CLI entry point."""
    parser = create_arg_parser()

    if len(sys.argv) == 1:
        parser.print_help(sys.stderr)
        sys.exit(1)

    args = parser.parse_args()
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not os.path.exists(args.input):
        logger.error(f"Input file not found: {args.input}")
        sys.exit(1)

    try:
        parser_config = create_parser_config(
            default_nsites=args.default_nsites,
            row_tolerance=args.row_tolerance,
            validate_rows=not args.no_validate,
        )
        display = create_display_config(logo_type=args.type, color_scheme=args.color_scheme)
        source = load_input(args.input, args.mode)
        logo = build_logo(source, parser_config=parser_config, display=display)

    except (LogoError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    logger.info(f"Built logo for {logo.record.identifier!r} with {logo.record.length} position(s)")

    if args.format == "tsv":
        logo.to_frame().to_csv(sys.stdout, sep="\t", index=False)
    else:
        print(json.dumps(logo.to_dict()))


if __name__ == "__main__":
    main_cli()
