# -*- coding: utf-8 -*-
"""
ShareSwap tooling:

- `contracts.tools.scenario` loads YAML scenarios and replays them on a fresh engine
- `contracts.tools.simulate` is the `shareswap-sim` command line front end
"""
