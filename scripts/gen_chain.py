# scripts/gen_chain.py
"""
Write root, leaf and client certificates + keys.
Usage: python scripts/gen_chain.py --host localhost,127.0.0.1 --out certs
"""
import sys, os
# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gencert.cli import main

if __name__ == "__main__":
    sys.exit(main())
