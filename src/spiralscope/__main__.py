from spiralscope.cli import main

main()
