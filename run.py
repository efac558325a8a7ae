import uvicorn
import os
import sys

if __name__ == "__main__":
    # Ensure usage of the current directory for imports
    sys.path.append(os.path.dirname(os.path.abspath(__file__)))

    print("🚀 Starting FormCraft Backend...")
    uvicorn.run(
        "formcraft.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 5002)),
        reload=os.getenv("DEBUG", "False") == "True",
    )
