# scripts/gen_tiered.py
"""
Write a root CA, server/client intermediates and per-name leaves.
Usage: python scripts/gen_tiered.py --servers 3 --clients 3 --out temp
"""
import sys, os
# Add project root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gencert.cli import main_tiered

if __name__ == "__main__":
    sys.exit(main_tiered())
