from coverity_mcp.main import main

main()
