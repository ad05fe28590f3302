#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for the Zulip server installer.

    install.py --hostname=chat.example.org --email=admin@example.org --certbot
"""

import sys

from provision.main_installer import main

if __name__ == "__main__":
    sys.exit(main())
