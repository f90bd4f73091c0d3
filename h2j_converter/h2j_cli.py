#!/usr/bin/env python3
"""
HL7 v2.x to JSON Converter
==========================

Command-line entry point for the h2j package.

Two conversion modes are available:
- Direct mapping (default): the JSON mirrors the message's segments, fields,
  components and subcomponents using the names from the profiles.
- Template mapping (--template): a JSON template whose leaves are path
  expressions such as "PID-5.1" is filled from the message.

Usage:
    python h2j_cli.py <message_file> [output_file] [options]
    python h2j_cli.py --analyze <message_file>

Examples:
    # Direct mapping to stdout
    python h2j_cli.py message.hl7

    # Direct mapping with a custom profile
    python h2j_cli.py message.hl7 output.json --profile MyProfile.json

    # Template mapping, repeating values joined with "; "
    python h2j_cli.py message.hl7 output.json --template simpleTemplate.json --concat "; "

    # Analyze the message without converting it
    python h2j_cli.py --analyze message.hl7
"""

import sys
import json
import argparse
from pathlib import Path

from h2j import ConfigLoader, HL7JsonTransformer, HL7Parser, ResourceManager, TemplateTransformer
from h2j.utils import ConfigurationError, HL7ParsingError, TemplateError, TraceLogger, UnsupportedTemplateError
from h2j.version import get_version_string


def create_argument_parser():
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="HL7 v2.x to JSON Converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s message.hl7                                     # Direct mapping to stdout
  %(prog)s message.hl7 output.json --config h2j_config.json
  %(prog)s message.hl7 output.json --template simpleTemplate.json
  %(prog)s --analyze message.hl7                           # Analyze message only
        """
    )

    parser.add_argument(
        'message_file',
        help='Path to the HL7 message to convert or analyze'
    )

    parser.add_argument(
        'output_file',
        nargs='?',
        default=None,
        help='Path for the output JSON file (prints to stdout when omitted)'
    )

    parser.add_argument(
        '-c', '--config',
        default=None,
        help='Path to configuration file (built-in defaults when omitted)'
    )

    parser.add_argument(
        '--profile',
        default=None,
        help='Segment profile resource (overrides the configuration)'
    )

    parser.add_argument(
        '--fields-profile',
        default=None,
        help='Data type profile resource (overrides the configuration)'
    )

    parser.add_argument(
        '-t', '--template',
        default=None,
        help='Template resource; switches to template mapping'
    )

    parser.add_argument(
        '--concat',
        default=None,
        help='Join repeating template values with this delimiter instead of emitting arrays'
    )

    parser.add_argument(
        '--resources',
        default=None,
        help='Directory holding profile and template resources'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=get_version_string()
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '-a', '--analyze',
        action='store_true',
        help='Analyze the message and show a summary without conversion'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Output analysis results as JSON (use with --analyze)'
    )

    return parser


def print_analysis(message_file: str, analysis: dict) -> None:
    """Print a message analysis in a formatted way."""
    print()
    print("=" * 60)
    print("  HL7 MESSAGE ANALYSIS")
    print("=" * 60)
    print()

    print(f"  Filename:      {Path(message_file).name}")
    print(f"  Message Type:  {analysis['message_type'] or '(not found)'}")
    print(f"  Control ID:    {analysis['control_id'] or '(not found)'}")
    print(f"  Version:       {analysis['version'] or '(not found)'}")
    print()

    print("  SEGMENT COUNTS:")
    for code, count in analysis['segment_counts'].items():
        print(f"    {code}: {count}")
    print()
    print(f"    TOTAL SEGMENTS:  {analysis['segment_count']}")
    print()

    if analysis['hierarchy']:
        print("  HIERARCHY:")
        _print_outline(analysis['hierarchy'], depth=2)
        print()

    print("=" * 60)


def _print_outline(outline: list, depth: int) -> None:
    for node in outline:
        print(f"{'  ' * depth}- {node['segment']}")
        _print_outline(node['children'], depth + 1)


def read_message(message_file: str) -> str:
    """
    Read an HL7 message file.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    message_path = Path(message_file)
    if not message_path.is_file():
        raise FileNotFoundError(f"HL7 message file not found: {message_file}")
    return message_path.read_text(encoding='utf-8')


def main(argv=None):
    """Main entry point for the h2j converter."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        message = read_message(args.message_file)
        config = ConfigLoader.load(args.config, verbose=args.verbose)

        # Handle analyze mode
        if args.analyze:
            manager = ResourceManager(args.resources or config.profiles.resources_directory)
            profile = manager.load_profile(args.profile or config.profiles.profile)
            analysis = HL7Parser(message, profile, config.encoding).analyze()

            if args.json:
                print(json.dumps(analysis, indent=2))
            else:
                print_analysis(args.message_file, analysis)
            return 0

        profile_name = args.profile or config.profiles.profile
        template_name = args.template or config.profiles.template
        concat_delimiter = args.concat if args.concat is not None else config.output.concat_delimiter

        if args.verbose:
            print(f"🔧 {get_version_string()}")
            print(f"   Message File: {args.message_file}")
            print(f"   Output File: {args.output_file or '(stdout)'}")
            print(f"   Profile: {profile_name}")
            if template_name:
                print(f"   Template: {template_name}")
            print()

        manager = ResourceManager(args.resources or config.profiles.resources_directory, verbose=args.verbose)
        trace_logger = TraceLogger.from_config(config.trace_log)

        if template_name:
            transformer = TemplateTransformer.from_resources(template_name, profile_name, manager, config)
            result = transformer.transform(message, concat_delimiter, trace_logger)
        else:
            transformer = HL7JsonTransformer.from_resources(
                message,
                profile_name,
                args.fields_profile or config.profiles.field_profile,
                manager,
                config
            )
            result = transformer.transform(trace_logger)

        output_text = json.dumps(result, indent=config.output.indent)

        if args.output_file:
            output_path = Path(args.output_file)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output_text, encoding='utf-8')
            print(f"🎉 Conversion successful!")
            print(f"   Generated: {output_path}")
        else:
            print(output_text)

        if trace_logger:
            log_path = trace_logger.write_log(args.message_file, args.output_file or "stdout.json")
            if args.verbose:
                print(f"📝 Trace log written to {log_path}")

        return 0

    except FileNotFoundError as e:
        print(f"❌ File Error: {e}")
        return 1

    except ConfigurationError as e:
        print(f"❌ Configuration Error: {e}")
        return 1

    except UnsupportedTemplateError as e:
        print(f"❌ Unsupported Template: {e}")
        return 1

    except TemplateError as e:
        print(f"❌ Template Error: {e}")
        return 1

    except HL7ParsingError as e:
        print(f"❌ HL7 Parsing Error: {e}")
        return 1

    except KeyboardInterrupt:
        print(f"\n⚠️  Conversion interrupted by user")
        return 130

    except Exception as e:
        print(f"❌ Unexpected Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
