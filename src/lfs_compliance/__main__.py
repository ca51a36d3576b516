import sys

from lfs_compliance.cli import main

sys.exit(main())
