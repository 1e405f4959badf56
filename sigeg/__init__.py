"""
SIGEG - Sistema de Gestión de Ganancias

A two-user earnings tracker: a Streamlit front-end over a small REST API
that keeps every task in one JSON file.

DESIGN PRINCIPLES:
1. The UI never waits on the network: changes apply locally first
2. A change the server rejects is rolled back, and logged
3. Storage layer is swappable
4. No plaintext credentials anywhere
"""

__version__ = "1.0.0"
__author__ = "SIGEG Team"
