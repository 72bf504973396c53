"""Language Server Protocol structures, JSON-RPC request IDs and document URIs."""