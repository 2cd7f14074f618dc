import sys

from itpl.cli._dispatcher import main

sys.exit(main())
