from kubewait.operator.cli import main

main()
