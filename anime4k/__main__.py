import sys

from anime4k.cli import main

sys.exit(main())
