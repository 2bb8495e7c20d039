"""
vex-server: bounding-box extraction over HTTP

- Validates ?north&south&east&west (or ?n&s&e&w) into a BoundingBox
- Runs `<VEX_CMD> <VEX_DB> <south> <west> <north> <east> -`
- Streams the program's stdout back as osm_export_<lat>_<lon>.pbf
  under transport flow control (slow clients slow the program down)

Entry point: `vex-server` or `python -m vex_server.server`.
"""
