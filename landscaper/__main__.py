import sys

from landscaper.cli import main

sys.exit(main())
