"""Starter programs shown in a fresh editor for each language."""

from typing import Final

from playground_exec.models import Language

CPP_TEMPLATE: Final[str] = """\
#include <iostream>
#include <vector>
#include <algorithm>
using namespace std;

int main() {
    cout << "Hello, World!" << endl;

    // Example: Working with vectors
    vector<int> nums = {5, 2, 8, 1, 9};
    sort(nums.begin(), nums.end());

    cout << "Sorted numbers: ";
    for (int num : nums) {
        cout << num << " ";
    }
    cout << endl;

    // Example: Reading input
    // Uncomment lines below to test input:
    // int n;
    // cout << "Enter a number: ";
    // cin >> n;
    // cout << "You entered: " << n << endl;

    return 0;
}
"""

PYTHON_TEMPLATE: Final[str] = """\
print("Hello, World!")

# Example: Working with lists
numbers = [5, 2, 8, 1, 9]
numbers.sort()
print("Sorted numbers:", numbers)

# Example: Simple loop
for i in range(5):
    print(f"Count: {i}")

# Example: Reading input
# Uncomment lines below to test input:
# name = input("Enter your name: ")
# print(f"Hello, {name}!")

# Write your code here
"""

_TEMPLATES: Final[dict[Language, str]] = {
    Language.CPP: CPP_TEMPLATE,
    Language.PYTHON: PYTHON_TEMPLATE,
}


def get_template(language: Language | str) -> str:
    """Starter program for language (name or kind tag)."""
    return _TEMPLATES[Language.parse(language)]
