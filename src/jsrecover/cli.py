import argparse
import json
import logging
import sys
from dataclasses import fields

from .deobfuscator import DeobfuscatorOptions, deobfuscate


def build_parser():
    parser = argparse.ArgumentParser(prog='jsrecover', description='Deobfuscate JavaScript code.')
    parser.add_argument('input_file', type=str, help='The path to the obfuscated JavaScript file.')
    parser.add_argument('output_file', type=str, help='The path to write the deobfuscated code to.')
    for option in fields(DeobfuscatorOptions):
        flag = '--no-' + option.name.replace('_', '-')
        parser.add_argument(flag, dest=option.name, action='store_false',
                            help=f"Disable the '{option.name.replace('_', ' ')}' stage.")
    parser.add_argument('--json', action='store_true', help='Print the full result record as JSON.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log every stage to stderr.')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        with open(args.input_file, 'r', encoding='utf-8') as f: obfuscated_code = f.read()
    except FileNotFoundError:
        print(f"Error: Input file not found at {args.input_file}"); return 1

    options = DeobfuscatorOptions(**{option.name: getattr(args, option.name) for option in fields(DeobfuscatorOptions)})
    result = deobfuscate(obfuscated_code, options)

    with open(args.output_file, 'w', encoding='utf-8') as f: f.write(result.code)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0
    for transform in result.transforms_applied:
        print(f"  + {transform}")
    for error in result.errors:
        print(f"  ! {error}")
    status = 'completed with warnings' if result.errors else 'completed'
    print(f"Deobfuscation {status} in {result.time_ms:.1f} ms")
    print(f"Deobfuscated code written to {args.output_file}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
