import sys

from cncfinisher.cli import main

sys.exit(main())
