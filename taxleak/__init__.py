#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Package initialization and version metadata.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

from .version import __version__

__all__ = ["__version__"]

# taxleak v0.1.0
# Any usage is subject to this software's license.
