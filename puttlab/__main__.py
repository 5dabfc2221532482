from puttlab.cli import main

main()
