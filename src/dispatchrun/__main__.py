from dispatchrun.cli import main

main()
