#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
taxleak v0.1.0

Version information.

Author: taxleak Development Team
License: MIT - See LICENSE
"""

__version__ = "0.1.0"

# taxleak v0.1.0
# Any usage is subject to this software's license.
