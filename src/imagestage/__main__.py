import sys

from imagestage.cli import main

sys.exit(main())
