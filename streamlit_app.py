#!/usr/bin/env python3
"""Entry point: ``streamlit run streamlit_app.py``"""

from interior_ai.app import main

main()
