"""MCP tool registration for the image catalog server"""
