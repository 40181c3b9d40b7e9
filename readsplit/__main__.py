import sys

from readsplit.cli import main

sys.exit(main())
