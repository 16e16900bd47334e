#!/usr/bin/env python3
"""
Basic usdtgen usage.

Compiles examples/probes.d, prints the three generated artifacts, writes
them to a temporary directory and checks a snippet of application code
against the probe signatures.

Building the native side (not done here):

    dtrace -h -s probes.d -o probes.h
    cc -fPIC -c probes_probes.c -o probes_probes.o
    dtrace -G -s probes.d probes_probes.o -o probes_dtrace.o
    cc -shared probes_probes.o probes_dtrace.o -o libprobes.so

Usage:
    python3 basic_usage.py
"""

import os
import sys
import tempfile

# Add usdtgen to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from usdtgen import check_source, compile_file, generate_artifacts, write_artifacts
from usdtgen.utils import setup_logging

APPLICATION = '''
import probes_probes as probes

def handle(path, status, size):
    probes.server.request.fire(lambda: (status, path))
    probes.server.response.fire(lambda: (status, size))
    probes.server.start.fire(lambda: "oops")
'''


def main():
    setup_logging('INFO')
    source = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'probes.d')

    provider_file = compile_file(source)
    artifacts = generate_artifacts(provider_file)

    for kind, name in artifacts.file_names().items():
        print(f"===== {name} ({kind.value}) =====")
        print(artifacts.by_kind()[kind].content)

    with tempfile.TemporaryDirectory(prefix='usdtgen_example_') as out_dir:
        for path in write_artifacts(artifacts, out_dir):
            print(f"wrote {path}")

    print("Checking application call sites:")
    errors = check_source(provider_file, APPLICATION, 'app.py')
    for error in errors:
        print(f"  {error}")
    return 0 if len(errors) == 1 else 1


if __name__ == '__main__':
    sys.exit(main())
