from hotflow import main

main()
