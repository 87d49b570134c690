import sys

from europe_map.cli import main

sys.exit(main())
