# PXF CLI Package
# ===============
# Rendering of option listings, resolved configs and errors.

from cli.renderer import Renderer
