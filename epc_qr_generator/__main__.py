import sys

from epc_qr_generator.cli import main

sys.exit(main())
