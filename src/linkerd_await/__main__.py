from linkerd_await.cli import main

if __name__ == "__main__":
    main()
