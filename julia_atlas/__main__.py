import sys

from julia_atlas.cli import main

sys.exit(main())
