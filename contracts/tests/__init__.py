# -*- coding: utf-8 -*-
"""Contract tests: token, access control, math helpers, ShareSwap and the simulator."""
