from search_proxy.proxy import main

main()
