"""molens: compound structure resolution, molfile to PDB conversion and functional-group annotation."""

__version__ = "0.1.0"
