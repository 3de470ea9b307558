"""
apsak-miner - command line front end for the apsaK CPU miner
"""

__version__ = "0.2.0"
__author__ = "apsaK Miner Team"

from .options import MinerOptions, InvalidPercentFormat, parse_devfund_percent

__all__ = ['MinerOptions', 'InvalidPercentFormat', 'parse_devfund_percent']
