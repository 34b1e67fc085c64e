import sys

from .nearsyn import main

sys.exit(main())
