#!/usr/bin/env python3
"""
Starts the sparse matrix calculator API.
Host and port come from HOST / PORT (a .env file is honored).
"""

import os

from sparse_calc import create_app

app = create_app()

if __name__ == '__main__':
    app.run(host=os.environ.get('HOST', '127.0.0.1'), port=int(os.environ.get('PORT', 5000)))
