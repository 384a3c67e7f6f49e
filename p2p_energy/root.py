"""
Main paths of the codebase for the P2P Energy Marketplace project.
"""

from os.path import dirname, realpath

__src__ = dirname(p=realpath(__file__))
__main__ = dirname(p=dirname(p=realpath(__file__)))
