import sys

from direct_upload.cli import main

sys.exit(main())
