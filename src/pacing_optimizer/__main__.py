from pacing_optimizer.cli import main

main()
