import sys

from protonvpn_status.app import main

sys.exit(main())
