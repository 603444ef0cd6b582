from research_agents.cli.main import main

main()
