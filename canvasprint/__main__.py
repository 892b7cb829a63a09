import sys

from canvasprint.cli import main

sys.exit(main())
