from argo_render.commands import main

if __name__ == "__main__":
    main()
