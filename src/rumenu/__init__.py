"""
rumenu - frequency-ranked application launcher

Lists everything on $PATH, shows it in a picker (bemenu by default) with the
most used entries first, runs the choice through $SHELL and remembers it.

Data: $XDG_DATA_HOME/rumenu/counts (falls back to ~/.local/share/rumenu/counts)
"""

__version__ = "0.1.0"
