"""Wire-level values both the client and the server agree on."""
