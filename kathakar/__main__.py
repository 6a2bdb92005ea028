import sys

from kathakar import main

sys.exit(main())
