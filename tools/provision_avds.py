#!/usr/bin/env python3
"""
Run the provisioning tool from a source checkout.

Usage:
    tools/provision_avds.py android --api-levels 24,25 --architectures x86 --accept-licenses
    tools/provision_avds.py ios
"""

import os
import sys

# Add parent directory to path to import from the provisioner package
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from provisioner.cli import main

if __name__ == "__main__":
    sys.exit(main())
