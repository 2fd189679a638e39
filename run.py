#!/usr/bin/env python3
"""
Direct Upload Form Generator

Run this script to sign an S3 upload policy and print the form fields a
browser needs to POST a file straight into a bucket.

Usage:
    python run.py                          # Use the only profile in config.json
    python run.py -c custom.json -p media  # Use a named profile
    python run.py -b my-bucket -r eu-west-1
    python run.py -o acl=public-read -o max_file_size=10
    python run.py -f json --output form.json
    python run.py -f html --inputs-only
"""

import sys
from direct_upload.cli import main

if __name__ == "__main__":
    sys.exit(main())
