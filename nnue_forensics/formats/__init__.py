# nnue_forensics/formats/__init__.py
"""Binary codecs: NNUE header and LEB128 frames."""
